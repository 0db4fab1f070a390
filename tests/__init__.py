"""
Cross-cutting test suite for the contact form backend.

Test Organization:
- integration/ - Multi-threaded and full-stack tests
- App-specific tests remain in their respective app directories (e.g., contact/tests.py)
"""
