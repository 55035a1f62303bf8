"""Core reading-aid logic: text rules, playback timing, break timing.

WHY: The core package holds the only code with real state and timing
semantics. Everything here is UI-framework-free and driven through
injected collaborators (scheduler, narrator, haptics).

HOW: tokenizer.py and lexical.py are pure text functions; rules.py holds
the default dictionaries and custom rule loading; playback.py,
break_timer.py and dictation.py are explicit state machines fed by a
scheduler from scheduler.py; effects.py defines the narrator/haptic
interfaces; errors.py the exception taxonomy.

RULES:
- No module here imports from the server or CLI layers
- The three components (lexical, playback, break timer) never call each other
"""
