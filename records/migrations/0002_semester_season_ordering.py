from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("records", "0001_initial"),
    ]

    operations = [
        migrations.AlterModelOptions(
            name="semester",
            options={
                "ordering": [
                    "-year",
                    models.Case(
                        models.When(season="Spring", then=models.Value(1)),
                        models.When(season="Summer", then=models.Value(2)),
                        models.When(season="Fall", then=models.Value(3)),
                        models.When(season="Winter", then=models.Value(4)),
                        default=models.Value(0),
                        output_field=models.IntegerField(),
                    ).desc(),
                ],
            },
        ),
    ]
