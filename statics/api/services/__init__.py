"""Image preprocessing, identity and storage services"""
