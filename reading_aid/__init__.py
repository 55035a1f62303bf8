"""Reading Aid: reading support tools for dyslexic readers.

WHY: Reading with dyslexia is easier with word-by-word highlighting,
simpler vocabulary, gentle spelling help, and regular breaks. The app
screens around these aids are thin; the state and timing logic behind
them lives here, free of any UI framework, so it can be tested without
a rendering harness.

HOW: The core has a tokenizer and lexical rule engine for text, a
playback synchronizer for word highlighting and a break timer for rest
prompts. The timed parts are driven by an injected scheduler. A
settings model, a CLI and a small HTTP API sit on top.

RULES:
- Core components never call each other; the caller wires them together
- Time only enters through a Scheduler; nothing sleeps or spawns threads
- Text operations are total functions (empty text is not an error)
"""

__version__ = "0.1.0"
