"""
Identifier parsing for idwatch.

Provides the base-36 lexer and the decoder that turns encoded text into
DecodedIdentifier objects.
"""
