"""jspnav: go-to-definition from JSP templates into Java sources."""

__version__ = "0.3.0"
