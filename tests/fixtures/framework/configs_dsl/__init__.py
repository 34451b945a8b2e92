"""Stand-in for the TeamCity settings DSL framework used by the test suite."""
