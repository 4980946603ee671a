"""
Fleet module: cars and their availability status.
"""
