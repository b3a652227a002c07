"""Services that build and query the commit reference graph."""
