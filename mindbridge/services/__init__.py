"""External service integrations"""
