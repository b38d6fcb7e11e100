"""
Mood Domain

Daily mood check-ins (1-10) with optional notes and activities.
Notes are encrypted under the owner's key.
"""
