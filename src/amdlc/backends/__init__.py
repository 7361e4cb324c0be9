"""Bundle emitters."""
