"""Tokenizer, parser, interpreter and session of the hydra language."""
