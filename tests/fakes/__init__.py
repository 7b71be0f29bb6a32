"""In-memory fakes used by the test suite."""
