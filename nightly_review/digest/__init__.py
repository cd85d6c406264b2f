"""
Chat digest and delivery of the combined nightly review.
"""
