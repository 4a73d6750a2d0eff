"""Core domain package for linkbot.

Core contains link harvesting, page previews, and command routing without
any IRC or storage-specific code, keeping the message handling portable.
"""
