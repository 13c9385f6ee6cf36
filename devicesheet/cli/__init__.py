"""Command line interface (``devicesheet`` / ``python -m devicesheet.cli``)."""
