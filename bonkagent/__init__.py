"""Bonk agent dashboard backend: remote browser tasks, Solana wallet reads, vendor browser sessions."""
