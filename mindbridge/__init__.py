"""MindBridge mental-health platform API"""
