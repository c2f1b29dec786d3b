"""Presentation helpers and the Streamlit quote page."""
