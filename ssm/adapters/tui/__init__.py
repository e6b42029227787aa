"""
Terminal UI adapter
"""
