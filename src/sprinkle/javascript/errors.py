class JSCompilationError(Exception):
	"""Raised when a Python callable cannot be translated to JavaScript."""
