from tortoise import fields, models


class Branch(models.Model):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=255)

    class Meta:
        table = "branches"


class Cafeteria(models.Model):
    id = fields.IntField(primary_key=True)
    branch = fields.ForeignKeyField("models.Branch", related_name="cafeterias")
    name = fields.CharField(max_length=255)
    image_url = fields.CharField(max_length=1024, null=True)

    class Meta:
        table = "cafeterias"
        indexes = [
            ("branch_id",),  # Branch cafeteria listing
        ]


class MenuCategory(models.Model):
    id = fields.IntField(primary_key=True)
    cafeteria = fields.ForeignKeyField("models.Cafeteria", related_name="categories")
    name = fields.CharField(max_length=255)
    key = fields.CharField(max_length=64)
    image = fields.CharField(max_length=1024, null=True)

    class Meta:
        table = "menu_categories"
        indexes = [
            ("cafeteria_id",),
        ]


class MenuItem(models.Model):
    id = fields.IntField(primary_key=True)
    cafeteria = fields.ForeignKeyField("models.Cafeteria", related_name="menu_items")
    category = fields.ForeignKeyField("models.MenuCategory", related_name="menu_items")
    name = fields.CharField(max_length=255)
    description = fields.TextField(default="")
    price = fields.DecimalField(max_digits=12, decimal_places=2)
    image_url = fields.CharField(max_length=1024, null=True)
    # Tax rates in percent
    cgst = fields.DecimalField(max_digits=5, decimal_places=2, default=0)
    sgst = fields.DecimalField(max_digits=5, decimal_places=2, default=0)

    class Meta:
        table = "menu_items"
        indexes = [
            ("cafeteria_id",),  # Fast cafeteria menu queries
            ("category_id",),
        ]
