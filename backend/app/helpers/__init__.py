"""Pure helper functions for the journey pipeline."""
