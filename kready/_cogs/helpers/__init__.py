"""
General-purpose helpers not related to the client itself
(neither to the API calls nor to the polling engines nor to the structs),
which are used to prepare and control the runtime environment.

As a rule of thumb, helpers MUST be abstracted from the package
to such an extent that they could be extracted as reusable libraries.
If they implement concepts of the control-plane API, they are not "helpers"
(consider making them structs, clients, or engines).
"""
