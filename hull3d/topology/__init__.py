"""Face map and edge adjacency bookkeeping."""

from hull3d.topology.face_store import EdgeFaces, FaceStore, HullFace, PoppedFace, make_edge

__all__ = ["EdgeFaces", "FaceStore", "HullFace", "PoppedFace", "make_edge"]
