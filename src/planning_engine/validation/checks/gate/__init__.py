"""Ask-before-downshift safety gate."""
