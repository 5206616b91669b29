"""Configuration, errors, panel preparation and input loading."""
