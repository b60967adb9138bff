"""
All the data structures exchanged with the control-plane API or its callers.

All the functions here are purely data-manipulative and computational.
No external calls or any network activities are done here, except for
reading the local files with the credentials and certificates.
"""
