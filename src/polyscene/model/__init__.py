"""
The MODEL layer contains pure data structures.
It has NO knowledge of the GUI (Qt). PyVista is only touched when a mesh is
exported for rendering.
It deals with points, triangles and meshes.
"""
