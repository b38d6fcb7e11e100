"""Doctor directory, doctor profiles, and admin verification"""
