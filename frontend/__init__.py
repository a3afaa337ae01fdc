"""
Capture client for the VID Registration Demo (Gradio UI + API client).
"""
