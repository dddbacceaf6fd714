"""
prompts.py

Prompts sent to the vision model.

Two steps:
1. Classification: is this a standard fruit form or a mesh-bag form?
2. Extraction: read the form into JSON, with a prompt per category

Both extraction prompts ask for the same "totales" object, which is
the only part the rest of the service depends on.
"""

from bascula.schemas.weighing import DocumentCategory


CLASSIFICATION_PROMPT = """Look at the header of this document and decide which form it is.

Answer with ONLY one of these two words:
- "MALLAS" if the title is "Control Diario Cargue de Fruto Mallas" or the header contains the word "MALLAS"
- "FRUTO_NORMAL" if the title is "Control Diario Cargue de Fruto" without the word "MALLAS"
"""


# Shared instructions for the three totals at the bottom of the form
TOTALS_INSTRUCTIONS = """CRITICAL - THE TOTALS ROW:
At the BOTTOM of the form there is one horizontal row with three fields:
- "Peso Báscula": the largest number, 4-5 digits (typically 10000-25000). Example: 13940
- "Peso en campo": often empty, use 0 when empty
- "Total racimos": the smaller number, 2-4 digits (typically 200-1500). Example: 735

Rules:
1. Read COMPLETE numbers, never drop digits
2. Do NOT move a number from one field to another
3. Numbers must be plain integers without separators
"""


FRUIT_EXTRACTION_PROMPT = f"""Analyze this "CONTROL DIARIO CARGUE DE FRUTO" form and extract its data as structured JSON.

Extract:
1. Header: driver, date, vehicle plate, tractor code, legal code, reported by
2. Table rows: record number, gross weight, baskets, cart, scaffold, scale, net weight, tractor, time, notes
3. Totals (see below)
4. Signatures and any additional codes

{TOTALS_INSTRUCTIONS}
Respond ONLY with JSON in this format:
{{
    "tipo_documento": "Control Diario Cargue de Fruto",
    "fecha": "",
    "conductor": "",
    "placa_vehiculo": "",
    "codigo_tractor": "",
    "codigo_legal": "",
    "reporta": "",
    "registros": [
        {{
            "numero_registro": "",
            "peso_bruto": 0,
            "canastillas": 0,
            "carro": 0,
            "andamio": 0,
            "balanza": 0,
            "peso_neto": 0,
            "tractor": "",
            "horario": "",
            "observaciones": ""
        }}
    ],
    "totales": {{
        "peso_bascula": 0,
        "peso_neto_campo": 0,
        "total_racimos": 0
    }},
    "responsables": {{
        "firma_conductor": "",
        "firma_supervisor": ""
    }},
    "codigos_adicionales": [],
    "observaciones_generales": "",
    "tipo_detectado": "FRUTO"
}}
"""


MESH_FRUIT_EXTRACTION_PROMPT = f"""Analyze this "CONTROL DIARIO CARGUE DE FRUTO MALLAS" form and extract its data as structured JSON.

Extract:
1. Header: driver, date, vehicle plate, tractor code, legal code, reported by
2. Mesh bags (one entry per row): bag number, all recorded weights, times (##:##), notes
3. Totals (see below)
4. Signatures and any additional codes

{TOTALS_INSTRUCTIONS}
Respond ONLY with JSON in this format:
{{
    "tipo_documento": "Control Diario Cargue de Fruto Mallas",
    "fecha": "",
    "conductor": "",
    "placa_vehiculo": "",
    "codigo_tractor": "",
    "codigo_legal": "",
    "reporta": "",
    "mallas": [
        {{
            "numero_malla": "",
            "pesos": [],
            "horarios": [],
            "observaciones": ""
        }}
    ],
    "totales": {{
        "peso_bascula": 0,
        "peso_neto_campo": 0,
        "total_racimos": 0
    }},
    "responsables": {{
        "firma_conductor": "",
        "firma_supervisor": ""
    }},
    "codigos_adicionales": [],
    "observaciones_generales": "",
    "tipo_detectado": "MALLA FRUTO"
}}
"""


EXTRACTION_PROMPTS = {
    DocumentCategory.FRUIT: FRUIT_EXTRACTION_PROMPT,
    DocumentCategory.MESH_FRUIT: MESH_FRUIT_EXTRACTION_PROMPT,
}


def extraction_prompt_for(category: DocumentCategory) -> str:
    return EXTRACTION_PROMPTS[category]
