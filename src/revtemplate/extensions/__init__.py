"""Commit template language extensions shipped with revtemplate."""

from ._hex_counter import HexCounter, num_char_in_id, num_digits_in_id

__all__ = ["HexCounter", "num_char_in_id", "num_digits_in_id"]
