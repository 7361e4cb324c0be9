"""JavaScript and doc comment frontends."""
