"""
Proftest: psychometric test API and resumable test-session client.
"""
