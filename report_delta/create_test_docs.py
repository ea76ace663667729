"""
Create sample weekly reports for testing the comparison library.
"""
from io import BytesIO

from docx import Document

REPORT_TITLE = 'Informe semanal Iberia'

# Previous week, title + description layout
BASELINE_ITEMS = [
    REPORT_TITLE,
    'Cuentas',
    'Acme Retail - Renovación de contrato marco',
    'La renovación del contrato marco avanza según lo previsto con un avance del 40% '
    'y un presupuesto de 2.500€ aprobado por el área de compras del cliente.',
    'Globex - Migración de plataforma logística',
    'Sin novedad esta semana; el cliente mantiene la migración de la plataforma logística '
    'en pausa hasta nuevo aviso de su dirección de operaciones.',
    'Initech - Auditoría de seguridad anual',
    'Revisión de controles de acceso y cifrado en curso con el equipo de sistemas del cliente, '
    'entregables previstos para noviembre.',
    'Hooli - Propuesta de formación en la nube',
    'Preparación de la propuesta de formación en servicios de nube para los equipos técnicos '
    'del cliente durante el próximo trimestre.',
]

# Current week: Acme figures move, Globex turns into a risk, Initech is unchanged,
# Hooli disappears and Umbrella is new
CURRENT_ITEMS = [
    REPORT_TITLE,
    'Cuentas',
    'Acme Retail - Renovación de contrato marco',
    'La renovación del contrato marco avanza según lo previsto con un avance del 55% '
    'y un presupuesto de 2.500€ aprobado por el área de compras del cliente.',
    'Globex - Migración de plataforma logística',
    'Se retoma la migración de la plataforma logística: [RIESGO] retraso en la integración '
    'con el almacén central por falta de recursos del cliente.',
    'Initech - Auditoría de seguridad anual',
    'Revisión de controles de acceso y cifrado en curso con el equipo de sistemas del cliente, '
    'entregables previstos para noviembre.',
    'Umbrella - Nuevo piloto de analítica avanzada',
    'Primera reunión con el cliente para definir el alcance del piloto de analítica avanzada '
    'sobre los datos de ventas del último trimestre.',
]

# Blank-line separated layout
BASELINE_BLOCKS = [
    'Seguimiento Cuenta Acme',
    'Avance del 40% en la migración del almacén.',
    '',
    'Vertical Retail',
    'Sin novedad.',
    '',
    'Squad Datos',
    'Pipeline estable con tres oportunidades abiertas.',
]

CURRENT_BLOCKS = [
    'Seguimiento Cuenta Acme',
    'Avance del 55% en la migración del almacén.',
    '',
    'Vertical Retail',
    '[RIESGO] Retraso en la entrega del piloto.',
    '',
    'Otros varios',
    'Reunión trimestral con dirección.',
]


def create_report(paragraphs):
    """Create a report whose first paragraph is the title and whose section names are headings."""
    doc = Document()
    for idx, text in enumerate(paragraphs):
        if idx == 0:
            doc.add_heading(text, 0)
        elif text == 'Cuentas':
            doc.add_heading(text, level=1)
        else:
            doc.add_paragraph(text)
    return doc


def to_bytes(doc):
    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def report_bytes(paragraphs):
    return to_bytes(create_report(paragraphs))


if __name__ == '__main__':
    import os

    samples_dir = os.path.dirname(os.path.abspath(__file__))

    for name, paragraphs in (
        ('informe_semana_1.docx', BASELINE_ITEMS),
        ('informe_semana_2.docx', CURRENT_ITEMS),
        ('bloques_semana_1.docx', BASELINE_BLOCKS),
        ('bloques_semana_2.docx', CURRENT_BLOCKS),
    ):
        path = os.path.join(samples_dir, name)
        create_report(paragraphs).save(path)
        print(f'Created: {path}')

    print('\nSample reports created successfully!')
    print('\nKey differences between week 1 and week 2:')
    print('- Acme Retail: progress 40% -> 55%')
    print('- Globex: "Sin novedad" -> [RIESGO]')
    print('- Initech: unchanged')
    print('- Hooli: removed')
    print('- Umbrella: new item')
