"""
Recovered-asset auctions.

- Properties are created by staff and only visible publicly once published
- Images and documents are uploaded through the shared upload helper
- Citizens submit expressions of interest (EOI) against open properties
"""
