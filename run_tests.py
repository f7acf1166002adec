"""
Test runner script for the electrostatic field lab.

Run this script to execute all tests and verify implementation correctness.
"""

import sys
import pytest
import torch

def main():
    """Run all tests with detailed output."""
    print("Running Electrostatic Field Lab Tests")
    print("=" * 50)

    print(f"PyTorch version: {torch.__version__}")
    print(f"CUDA available: {torch.cuda.is_available()}")

    print("\nRunning tests...")

    exit_code = pytest.main([
        "tests",
        "-v",  # Verbose output
        "--tb=short",  # Short traceback format
        "--durations=10",  # Show 10 slowest tests
        "-x"  # Stop on first failure
    ])

    if exit_code == 0:
        print("\n✓ All tests passed successfully!")
    else:
        print(f"\n✗ Tests failed with exit code {exit_code}")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
