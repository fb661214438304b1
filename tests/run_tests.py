# File: tests/run_tests.py
#!/usr/bin/env python3
"""
Test runner for the Parking Reservation Backend tests.

    python tests/run_tests.py                  # every suite
    python tests/run_tests.py unit             # one suite
    python tests/run_tests.py unit.test_dtos   # one module
"""

import unittest
import sys
from pathlib import Path

TESTS_DIR = Path(__file__).parent

# Add the src directory and the tests directory to the Python path
sys.path.insert(0, str(TESTS_DIR.parent / "src"))
sys.path.insert(0, str(TESTS_DIR))


def run_all_tests(verbosity=2):
    """Run the unit and integration suites"""
    test_loader = unittest.TestLoader()
    test_suite = test_loader.discover(str(TESTS_DIR), pattern='test_*.py', top_level_dir=str(TESTS_DIR))

    test_runner = unittest.TextTestRunner(verbosity=verbosity)
    return test_runner.run(test_suite)


def run_specific_test(test_name, verbosity=2):
    """Run one suite directory (``unit``) or one dotted module (``unit.test_dtos``)"""
    test_loader = unittest.TestLoader()

    suite_dir = TESTS_DIR / test_name
    if suite_dir.is_dir():
        test_suite = test_loader.discover(str(suite_dir), pattern='test_*.py', top_level_dir=str(TESTS_DIR))
    else:
        test_suite = test_loader.loadTestsFromName(test_name)

    test_runner = unittest.TextTestRunner(verbosity=verbosity)
    return test_runner.run(test_suite)


if __name__ == "__main__":
    if len(sys.argv) > 1:
        result = run_specific_test(sys.argv[1])
    else:
        result = run_all_tests()

    sys.exit(0 if result.wasSuccessful() else 1)
