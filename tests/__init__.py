"""Test package for the attention trainer.

Core modules (clock, timers, placement, scheduler, scoring, session, stores)
are tested headlessly with a fake clock. The pygame smoke tests use the SDL
dummy drivers so no window or audio device is needed. Run ``pytest`` from the
project root.
"""
