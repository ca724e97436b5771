"""
Report package: render built timelines as event rows or flow summaries.
"""
