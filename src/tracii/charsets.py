# Printable ASCII without the space: "!" (33) through "~" (126)
PRINTABLE = "".join(chr(i) for i in range(33, 127))

# Small set for quick debugging runs: "-./01"
LIMITED = "".join(chr(i) for i in range(45, 50))
