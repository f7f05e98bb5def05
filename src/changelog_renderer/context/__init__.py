"""Issue providers that supply the renderer with GitHub issue data.

The renderer itself never talks to the network; these modules fetch
issues and users and shape them into the schemas it consumes.
"""
