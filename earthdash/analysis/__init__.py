"""
EarthDash - Analysis
Derived indicators and the composite dashboard view.
"""
