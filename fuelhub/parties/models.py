from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


KYC_STATUS_CHOICES = [
    ('pending', 'Pending'),
    ('approved', 'Approved'),
    ('rejected', 'Rejected'),
]

ACCOUNT_STATUS_CHOICES = [
    ('pending', 'Pending'),
    ('active', 'Active'),
    ('suspended', 'Suspended'),
    ('rejected', 'Rejected'),
]

COMPLIANCE_STATUS_CHOICES = [
    ('pending', 'Pending'),
    ('approved', 'Approved'),
    ('rejected', 'Rejected'),
    ('incomplete', 'Incomplete'),
]


class Customer(models.Model):
    """Customer profile (individual or business buying delivered fuel)"""
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='customer_profile')
    company_name = models.CharField(max_length=255, blank=True)
    vat_number = models.CharField(max_length=50, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.company_name or self.user.display_name

    class Meta:
        db_table = 'customers'


class Driver(models.Model):
    """Driver profile; location and availability drive dispatch eligibility"""
    PREMIUM_STATUS_CHOICES = [
        ('inactive', 'Inactive'),
        ('active', 'Active'),
    ]
    AVAILABILITY_CHOICES = [
        ('available', 'Available'),
        ('offline', 'Offline'),
        ('on_delivery', 'On Delivery'),
    ]

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='driver_profile')
    kyc_status = models.CharField(max_length=20, choices=KYC_STATUS_CHOICES, default='pending')
    status = models.CharField(max_length=20, choices=ACCOUNT_STATUS_CHOICES, default='pending')
    compliance_status = models.CharField(max_length=20, choices=COMPLIANCE_STATUS_CHOICES, default='pending')
    rejection_reason = models.TextField(blank=True)
    premium_status = models.CharField(max_length=20, choices=PREMIUM_STATUS_CHOICES, default='inactive')
    availability_status = models.CharField(max_length=20, choices=AVAILABILITY_CHOICES, default='offline')
    current_lat = models.FloatField(null=True, blank=True)
    current_lng = models.FloatField(null=True, blank=True)
    location_updated_at = models.DateTimeField(null=True, blank=True)
    job_radius_preference_miles = models.PositiveIntegerField(
        default=20, validators=[MinValueValidator(1), MaxValueValidator(500)]
    )
    license_number = models.CharField(max_length=50, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.user.display_name

    @property
    def has_location(self):
        return self.current_lat is not None and self.current_lng is not None

    class Meta:
        db_table = 'drivers'


class Supplier(models.Model):
    """Supplier (fuel wholesaler) owning one or more depots"""
    owner = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='supplier_profile')
    name = models.CharField(max_length=255)
    registered_name = models.CharField(max_length=255, blank=True)
    cipc_number = models.CharField(max_length=50, blank=True)
    vat_number = models.CharField(max_length=50, blank=True)
    kyb_status = models.CharField(max_length=20, choices=KYC_STATUS_CHOICES, default='pending')
    status = models.CharField(max_length=20, choices=ACCOUNT_STATUS_CHOICES, default='pending')
    compliance_status = models.CharField(max_length=20, choices=COMPLIANCE_STATUS_CHOICES, default='pending')
    rejection_reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def is_compliant(self):
        return self.status == 'active' and self.compliance_status == 'approved'

    class Meta:
        db_table = 'suppliers'
        ordering = ['name']


class Vehicle(models.Model):
    """Delivery vehicle registered by a driver"""
    driver = models.ForeignKey(Driver, on_delete=models.CASCADE, related_name='vehicles')
    registration_number = models.CharField(max_length=20)
    make = models.CharField(max_length=100, blank=True)
    model = models.CharField(max_length=100, blank=True)
    year = models.PositiveIntegerField(null=True, blank=True)
    capacity_litres = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    fuel_types = models.JSONField(default=list, blank=True, help_text="Fuel type codes this vehicle can carry")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.registration_number

    class Meta:
        db_table = 'vehicles'
        ordering = ['-created_at']


class Document(models.Model):
    """KYC/KYB document uploaded by a driver, supplier or customer"""
    OWNER_TYPE_CHOICES = [
        ('customer', 'Customer'),
        ('driver', 'Driver'),
        ('supplier', 'Supplier'),
        ('vehicle', 'Vehicle'),
    ]
    VERIFICATION_CHOICES = [
        ('pending', 'Pending'),
        ('verified', 'Verified'),
        ('rejected', 'Rejected'),
    ]

    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='documents')
    owner_type = models.CharField(max_length=20, choices=OWNER_TYPE_CHOICES)
    vehicle = models.ForeignKey(Vehicle, on_delete=models.CASCADE, null=True, blank=True, related_name='documents')
    doc_type = models.CharField(max_length=50)
    title = models.CharField(max_length=255, blank=True)
    file_url = models.URLField(max_length=1000)
    mime_type = models.CharField(max_length=100, blank=True)
    document_number = models.CharField(max_length=100, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    verification_status = models.CharField(max_length=20, choices=VERIFICATION_CHOICES, default='pending')
    rejection_reason = models.TextField(blank=True)
    verified_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='verified_documents')
    verified_at = models.DateTimeField(null=True, blank=True)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.doc_type} ({self.owner.username})"

    class Meta:
        db_table = 'documents'
        ordering = ['-uploaded_at']


class DeliveryAddress(models.Model):
    """Saved delivery location for a customer"""
    VERIFICATION_CHOICES = [
        ('pending', 'Pending'),
        ('verified', 'Verified'),
        ('rejected', 'Rejected'),
    ]

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='addresses')
    label = models.CharField(max_length=100)
    address_street = models.CharField(max_length=255)
    address_city = models.CharField(max_length=100)
    address_province = models.CharField(max_length=100)
    address_postal_code = models.CharField(max_length=20)
    address_country = models.CharField(max_length=100, default='South Africa')
    lat = models.FloatField(null=True, blank=True)
    lng = models.FloatField(null=True, blank=True)
    access_instructions = models.TextField(blank=True)
    verification_status = models.CharField(max_length=20, choices=VERIFICATION_CHOICES, default='pending')
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.label}: {self.address_street}, {self.address_city}"

    @property
    def full_address(self):
        parts = [self.address_street, self.address_city, self.address_province,
                 self.address_postal_code, self.address_country]
        return ', '.join(p for p in parts if p)

    class Meta:
        db_table = 'delivery_addresses'
        ordering = ['-is_default', '-created_at']


class PaymentMethod(models.Model):
    """Customer payment method; deletes are soft (is_active=False)"""
    METHOD_TYPE_CHOICES = [
        ('bank_account', 'Bank Account'),
        ('credit_card', 'Credit Card'),
        ('debit_card', 'Debit Card'),
    ]

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='payment_methods')
    method_type = models.CharField(max_length=20, choices=METHOD_TYPE_CHOICES)
    label = models.CharField(max_length=100)
    bank_name = models.CharField(max_length=100, blank=True)
    account_holder_name = models.CharField(max_length=255, blank=True)
    account_number = models.CharField(max_length=50, blank=True)
    branch_code = models.CharField(max_length=20, blank=True)
    card_last_four = models.CharField(max_length=4, blank=True)
    card_brand = models.CharField(max_length=50, blank=True)
    card_expiry_month = models.PositiveSmallIntegerField(null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(12)])
    card_expiry_year = models.PositiveSmallIntegerField(null=True, blank=True)
    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.label

    class Meta:
        db_table = 'payment_methods'
        ordering = ['-is_default', '-created_at']
