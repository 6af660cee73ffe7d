"""
Scripts package for Content Subscriptions API maintenance and manual testing.

Modules:
- seed_plans: Install the default plan catalog
- create_admin: Create or promote an admin account and print a token
- quota_walkthrough: Drive a running API through the daily quota flow
"""
