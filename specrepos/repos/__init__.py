"""
Repos — Registry, lifecycle, inspection and linting of spec-repo mirrors.
"""
