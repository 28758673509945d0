"""Board, column and task services."""
