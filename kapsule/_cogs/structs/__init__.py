"""
The data structures of the Kapsule API as this library sees them.

All the functions here are purely data-manipulative and computational.
No external calls or any i/o activities are done here.
"""
