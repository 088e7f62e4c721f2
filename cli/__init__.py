"""FocusCycle command line entry points."""
