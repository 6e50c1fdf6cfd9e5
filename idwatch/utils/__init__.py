"""Input acquisition, logging and reporting helpers for idwatch."""
