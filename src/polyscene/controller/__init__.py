"""
The CONTROLLER layer turns contours into renderable meshes and fetches assets.
"""
