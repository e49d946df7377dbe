"""
Streamlit UI for OmniCreative
"""
