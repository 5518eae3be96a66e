"""Core settings, options, progress and job handling"""
