"""
Tests for ProbeFinder

Test coverage:
- Local and global peak selection on synthetic spectra
- Probe extraction target zone and selectivity monotonicity
- Index idempotence, collisions and concurrent writers
- Offset voting, match-rate selection and tie-breaking
- Recognizer facade, audio helpers and the HTTP API
- Console log formatting and result banners
"""
