"""Cell content formatting, markdown reflow and inline images."""
