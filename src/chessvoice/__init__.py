"""
Chess voice moves: turn noisy speech-recognizer transcripts into legal moves or commands.

Components:
- lexicon: per-language word/token/value tables and substitution costs (YAML grammars)
- phrases: every admissible phrase for the current legal moves and squares
- matcher: substitution-cost matching of heard phrases against indexed phrases
- policy: auto-submit vs. ambiguity decision and labeled choice sets
- controller: per-game-view session (selection, choices, countdowns, commands, confirmations)
- referee: python-chess game host the controller can drive
"""
# Package exports are intentionally minimal; import modules directly as needed.
