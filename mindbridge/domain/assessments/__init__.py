"""
Assessments Domain

PHQ-9 (depression) and GAD-7 (anxiety) screening results. Severity bands are
derived from the scores; the per-question answers are encrypted under the
owner's key and only returned on request.
"""
