"""Movement lexicon and score validation."""
