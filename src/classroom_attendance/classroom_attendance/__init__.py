"""Classroom attendance package.

Organized by feature modules (schedules, tokens, attendance) with a thin Flask
controller layer over service/repository layers.
"""
