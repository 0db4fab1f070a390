"""
Contact Form App

Single-endpoint backend for static-site contact forms:
- Validation and sanitization of submissions
- Per-site allowlist
- Per-client sliding window rate limiting
- Email notification to staff
"""
