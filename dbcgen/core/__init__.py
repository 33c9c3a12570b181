"""Output primitives shared by the document emitters."""
