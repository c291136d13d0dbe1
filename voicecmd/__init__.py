"""voicecmd - speak a short command, have it transcribed, understood and run locally."""
