"""The twelve Berlin boroughs offered on signup and profile forms."""

BERLIN_BOROUGHS = (
    'Charlottenburg-Wilmersdorf',
    'Friedrichshain-Kreuzberg',
    'Lichtenberg',
    'Marzahn-Hellersdorf',
    'Mitte',
    'Neukölln',
    'Pankow',
    'Reinickendorf',
    'Spandau',
    'Steglitz-Zehlendorf',
    'Tempelhof-Schöneberg',
    'Treptow-Köpenick',
)


def borough_choices(placeholder: str = 'Choose your borough'):
    """(value, label) pairs for a WTForms SelectField, blank option first."""
    return [('', placeholder)] + [(name, name) for name in BERLIN_BOROUGHS]
