"""Symptom-to-specialist recommendations"""
