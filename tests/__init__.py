__description__ = "Test suite for repeat_hmm"

TEST_CATEGORIES = {
    'track': ('Packed track codec tests', 'tests/test_track.py'),
    'transitions': ('Transition model tests', 'tests/test_transitions.py'),
    'moves': ('Move table tests', 'tests/test_moves.py'),
    'lfhmm': ('Aligner and traceback tests', 'tests/test_lfhmm.py'),
    'alignment': ('Rendering and CIGAR tests', 'tests/test_alignment.py'),
    'integration': ('Config, I/O, pipeline and CLI tests', 'tests/test_integration.py'),
}


def list_tests():
    """List test categories."""
    print("Available Tests")
    print("=" * 60)
    for category, (description, path) in TEST_CATEGORIES.items():
        print(f"  {category:12} {description} ({path})")
    print("\n" + "=" * 60)
    print("Run tests with: pytest tests/ -v")
    print("Run specific test: pytest tests/test_lfhmm.py::test_worked_example -v")


def run_category(category: str):
    """Run tests in a specific category."""
    import subprocess
    import sys

    if category not in TEST_CATEGORIES:
        print(f"Unknown category: {category}")
        print(f"Available categories: {', '.join(TEST_CATEGORIES.keys())}")
        return 1

    result = subprocess.run([sys.executable, "-m", "pytest", TEST_CATEGORIES[category][1], "-v"])
    return result.returncode


__all__ = [
    'TEST_CATEGORIES',
    'list_tests',
    'run_category',
]
