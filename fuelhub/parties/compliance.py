"""
Compliance checklists for drivers and suppliers.

A profile's overall status is derived from the admin review fields on the
profile plus the verification state of the documents the owner uploaded.
"""
from .models import Document

DRIVER_REQUIRED_DOCUMENTS = [
    'za_id',
    'proof_of_address',
    'drivers_license',
    'prdp',
    'dangerous_goods_training',
    'medical_fitness',
    'criminal_check',
    'banking_proof',
]

# A passport satisfies the identity requirement for non-SA drivers
IDENTITY_ALTERNATIVES = {'za_id': 'passport'}

VEHICLE_REQUIRED_DOCUMENTS = [
    'vehicle_registration',
    'roadworthy_certificate',
    'insurance_certificate',
    'dg_vehicle_permit',
]

SUPPLIER_REQUIRED_DOCUMENTS = [
    'cipc_certificate',
    'vat_certificate',
    'tax_clearance',
    'dmre_license',
    'site_license',
    'environmental_authorisation',
    'fire_certificate',
    'sabs_certificate',
    'calibration_certificate',
    'public_liability_insurance',
]


def build_checklist(required, documents):
    uploaded = sorted({d.doc_type for d in documents})
    approved = sorted({d.doc_type for d in documents if d.verification_status == 'verified'})
    rejected = sorted({d.doc_type for d in documents if d.verification_status == 'rejected'})
    pending = sorted({d.doc_type for d in documents if d.verification_status == 'pending'})

    missing = []
    for doc_type in required:
        alternative = IDENTITY_ALTERNATIVES.get(doc_type)
        if doc_type in uploaded or (alternative and alternative in uploaded):
            continue
        missing.append(doc_type)

    return {
        'required': list(required),
        'uploaded': uploaded,
        'approved': approved,
        'rejected': rejected,
        'pending': pending,
        'missing': missing,
    }


def overall_status(profile, checklist):
    if profile.compliance_status == 'approved' and profile.status == 'active':
        return 'approved'
    if profile.compliance_status == 'rejected' or profile.status == 'rejected':
        return 'rejected'
    if checklist['missing'] or checklist['pending']:
        return 'incomplete'
    return 'pending'


def get_driver_compliance(driver):
    documents = list(Document.objects.filter(owner=driver.user))
    required = list(DRIVER_REQUIRED_DOCUMENTS)
    if driver.vehicles.filter(is_active=True).exists():
        required += VEHICLE_REQUIRED_DOCUMENTS
    checklist = build_checklist(required, documents)
    status = overall_status(driver, checklist)
    return {
        'overall_status': status,
        'can_access_platform': status == 'approved',
        'checklist': checklist,
        'rejection_reason': driver.rejection_reason or None,
    }


def get_supplier_compliance(supplier):
    documents = list(Document.objects.filter(owner=supplier.owner))
    checklist = build_checklist(SUPPLIER_REQUIRED_DOCUMENTS, documents)
    status = overall_status(supplier, checklist)
    return {
        'overall_status': status,
        'can_access_platform': status == 'approved',
        'checklist': checklist,
        'rejection_reason': supplier.rejection_reason or None,
    }
